"""Vendor Trust & Reputation Engine"""
