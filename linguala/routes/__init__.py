"""HTTP route groups mounted by ``linguala.api``."""
