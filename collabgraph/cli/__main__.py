"""Allow ``python -m collabgraph.cli`` execution."""

from collabgraph.cli.synthesize import main

main()
