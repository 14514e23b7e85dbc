"""Offer domain - offer lifecycle and mission hours"""
