"""Client domain - client records and their geocoded locations"""
