"""ft_sniper - friend.tech first-buy sniper for the Base chain."""

__version__ = "0.1.0"
