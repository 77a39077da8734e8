"""Engine core: pricing, trips, allocation, entertainment and bidding policy"""
