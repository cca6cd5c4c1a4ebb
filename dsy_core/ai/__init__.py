"""
AI Module - generation routing and multi-provider orchestration.

Architecture Overview:
=====================

    prompt + assets
          │
          ▼
┌───────────────────┐
│  Prompt Optimizer │  vision provider, ---TEXT--- / ---JSON--- reply
│  (DesignSpec)     │
└─────────┬─────────┘
          │ optimized text, spec, credential used
          ▼
┌───────────────────┐      images?     ┌───────────────────────┐
│ Generation Router │ ───── yes ─────▶ │ vision (Gemini)       │
│                   │                  │ + design pre-processor│
│                   │ ───── no ──────▶ │ fast text (SambaNova) │
└─────────┬─────────┘                  └───────────────────────┘
          │ raw model output
          ▼
┌───────────────────┐
│   Output Parser   │  flat HTML/CSS or multi-file
└───────────────────┘

Every provider draws keys from a CredentialPool; rate-limited keys are
marked failed and skipped until the pool is reset.

Module Structure:
================
    credentials.py   CredentialPool
    errors.py        exception hierarchy
    attempts.py      retry-loop state
    providers/       Gemini and SambaNova clients
    parsing/         output parser
    optimizer/       prompt optimizer
    preprocess/      design-feature extraction from images
    router/          generation router
    chat/            code assistant
    pipeline.py      optimize-then-generate builder
"""
