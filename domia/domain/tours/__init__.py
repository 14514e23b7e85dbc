"""Tour domain - route optimization and saved tours"""
