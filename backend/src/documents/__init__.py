"""Student document HTTP API"""
