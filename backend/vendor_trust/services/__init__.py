"""Vendor Trust Engine - Services"""
