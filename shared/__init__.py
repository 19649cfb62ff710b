# Shared libraries for the pilot portal
