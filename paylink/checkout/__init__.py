"""Payer-side checkout service"""
