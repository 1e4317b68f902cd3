"""
Signup example application for rowguard.
"""

from .demo import bootstrap_session, register, run_demo
from .models import Member

__all__ = ["Member", "bootstrap_session", "register", "run_demo"]
