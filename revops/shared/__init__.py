"""Shared schema helpers and validators"""
