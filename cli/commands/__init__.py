"""
Good4Work CLI Commands Package

Command modules for the Good4Work NFT command line.
"""

__all__ = ['config', 'metadata', 'mint', 'upload']
