"""Bid lifecycle service for the peer-to-peer marketplace backend."""
