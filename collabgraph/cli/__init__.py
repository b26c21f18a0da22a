"""Command-line tools for collabGraph.

- ``python -m collabgraph.cli synthesize "<name>"`` builds and prints a graph.
- ``python -m collabgraph.cli register "<name>" ...`` adds registry subjects.
"""
