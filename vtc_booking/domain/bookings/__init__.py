"""Booking domain - intake, availability and status lifecycle"""
