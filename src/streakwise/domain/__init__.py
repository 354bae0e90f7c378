"""Pure domain rules shared by every service."""
