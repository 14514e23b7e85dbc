"""Invoice domain - client billing with per-line totals"""
