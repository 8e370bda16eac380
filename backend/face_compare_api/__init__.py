"""HTTP service for face comparison and detection"""
