"""Source crawlers"""
