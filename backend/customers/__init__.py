"""Customer behavior analytics: RFM, segments, churn, lifetime value, patterns."""
