"""
swarm_trader - quorum-gated token trading driven by a swarm of HTTP agents.
"""

__version__ = "1.0.0"
