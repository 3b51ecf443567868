# Outfit generation core
