"""vocab-srs CLI.

Usage:
    vsrs sync vocab.json        Track new catalog items
    vsrs decks                  Due/new counts per deck
    vsrs review --deck verben   Review due cards
    vsrs config show            Scheduler settings
    vsrs export -o backup.json  Snapshot everything
"""

from vocab_srs.cli.main import app, main

__all__ = ["app", "main"]
