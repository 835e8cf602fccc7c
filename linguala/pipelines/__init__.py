"""Text, document and account pipelines."""
