"""Data access repositories built on the DataClient interface."""
