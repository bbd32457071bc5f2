"""Domain packages: scheduling and customers"""
