# Services
#
# backend.py    - the one external dependency (reasoning + web search)
# normalizer.py - text canonicalization, shared by every path
# pipeline.py   - /verify orchestration
# answerer.py   - /ask
# rephraser.py  - /rephrase
# rankings.py   - per-source reliability statistics
