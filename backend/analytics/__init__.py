"""Input records and feature extraction shared by the analytics pipelines."""
