"""Business domains - bookings and operator administration"""
