"""Terminal output for buildstash commands.

Modules
-------
renderer
    ``BuildstashRenderer`` prints tables and summaries; ``ConsoleReporter``
    turns orchestrator progress notifications into Rich console lines.
"""
