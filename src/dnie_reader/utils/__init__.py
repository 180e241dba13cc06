"""Low-level decoding helpers: TLV, MRZ and dates."""
