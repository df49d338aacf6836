"""Building blocks for the name-based process terminator."""
