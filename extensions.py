"""
Shared Flask extension instances.

Created here rather than in create_app() so blueprints can import them at
module level without a circular import.
"""

from __future__ import annotations

from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

limiter = Limiter(key_func=get_remote_address, default_limits=["1000 per hour"])
