"""collabGraph: collaboration graph synthesis for music creators.

Turns a registered subject name into a deduplicated, role-annotated graph of
the people they work with (artists, producers, songwriters) and the people
those collaborators work with in turn.
"""

__version__ = "0.1.0"
