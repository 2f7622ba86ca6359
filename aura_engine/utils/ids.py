"""
Aura Engine Detection ID Utilities
Generate unique detection IDs for tracing.
"""
import uuid
from datetime import datetime


def generate_detection_id() -> str:
    """
    Generate a unique detection ID for log correlation.
    
    Returns:
        Unique detection ID string
    """
    timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
    short_uuid = str(uuid.uuid4())[:8]
    return f"aura-{timestamp}-{short_uuid}"

