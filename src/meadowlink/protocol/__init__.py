"""
The protocol package classifies inbound device messages, encodes outbound commands and
correlates each outstanding command with the reply that answers it.
"""
