"""POS Analytics runtime configuration."""
