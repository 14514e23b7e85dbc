"""Worker directory - lets companies find workers to send offers to"""
