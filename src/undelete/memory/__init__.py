"""In-process state owned by the recovery pipeline."""
