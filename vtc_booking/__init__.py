"""VTC booking intake API"""
