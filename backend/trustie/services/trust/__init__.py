# Trust Layer Services
#
# Everything that decides how far a piece of AI-generated text can be trusted:
# - Which claims it makes (ClaimExtractor)
# - Which claims are famous myths (MisconceptionTable)
# - What the web says about each claim (EvidenceRetriever)
# - How reliable each source is (trust_tiers)
# - Whether the evidence supports the claim (ClaimAdjudicator)
# - How much an answer to an open question can be trusted (QueryTrustScorer)
