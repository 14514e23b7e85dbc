"""Appointment domain - the worker calendar"""
