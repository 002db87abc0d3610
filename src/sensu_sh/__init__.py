"""sensu-sh - shell scripts with jq-style queries over monitoring events."""

__version__ = "0.1.0"
