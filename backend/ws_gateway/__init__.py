"""
WebSocket gateway: pushes the live order snapshot to connected staff.
"""
