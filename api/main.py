"""
CommunityWatch - Serverless Entry Point
Exposes the FastAPI app for serverless hosts that import ``handler``.
"""

import os
import sys

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from communitywatch.api.main import app

handler = app
