"""Mission domain - publishing missions to workers and following them up"""
