"""Notification sinks"""
