"""External collaborators: swap quotes, custodial wallet, chain reads."""
