"""Backend for an amateur football federation: leagues, seasons, fixtures."""
