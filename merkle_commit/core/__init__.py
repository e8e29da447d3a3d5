"""Core Merkle tree data structures, errors and configuration"""
