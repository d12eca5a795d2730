"""Malware scan service clients"""
