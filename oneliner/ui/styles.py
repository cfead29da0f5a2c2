"""Terminal styles shared by the UI stages."""

from rich.style import Style

# Option titles and headings
TITLE = Style(color="color(205)", bold=True)

# Shell commands
COMMAND = Style(color="color(86)", bgcolor="color(235)")

# Option descriptions
DESCRIPTION = Style(color="color(241)")

# The option under the cursor
SELECTED = Style(color="color(170)", bold=True)

# Help and placeholder text
HELP = Style(color="color(241)", italic=True)

# Placeholder shown while the safety pass is running
CHECKING = Style(color="color(241)", italic=True)

# Low risk: network operations, downloads, scans
WARNING_LOW = Style(color="color(220)", italic=True)

# High risk: destructive operations, data loss
WARNING_HIGH = Style(color="color(196)", bold=True)

# Fatal errors on stderr
ERROR = Style(color="red", bold=True)
