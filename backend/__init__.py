############################################################
#
# etlive - ET Live Data Server
#
# __init__.py: Root package initialization and version definition
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""ET Live - live telemetry collection and cache server."""

__version__ = "0.3.0"
