"""
Phorest third-party API integration
"""
from .envelopes import extract_list
from .gateway import PhorestGateway, phorest_gateway

__all__ = ['extract_list', 'PhorestGateway', 'phorest_gateway']
