"""Logging, validation and benchmarking utilities"""
