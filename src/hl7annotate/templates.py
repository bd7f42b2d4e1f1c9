"""Default file contents written by `hl7annotate init`."""

DEFAULT_CONFIG_YAML = """\
# HL7Annotate configuration.
# Strings must use single quotes.

resolvers:
  dictionary:
    path: '.hl7annotate/concepts.yaml'
    default_locale: 'en'

shortcuts:
  .defaults:
    resolver: 'dictionary'

tasks:
  - name: 'Annotate form templates'
    source:
      include: ['**/*.xsl']
    locale: 'en'
"""

DEFAULT_CONCEPTS_YAML = """\
# Concept code -> display name, or -> {locale: display name}.
concepts:
  '1107':
    en: 'NONE'
"""
