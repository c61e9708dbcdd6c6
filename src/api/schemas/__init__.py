# This file marks the schemas package for API request and response models.
# Grouping contracts here keeps the wire format of every endpoint in one place.
