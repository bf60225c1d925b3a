"""Backend for the IBCOL website: signed-URL uploads and translations."""
