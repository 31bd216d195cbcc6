"""
LafdaClub storefront bot.
"""
