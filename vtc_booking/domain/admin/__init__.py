"""Admin domain - operator bootstrap, login and token checks"""
