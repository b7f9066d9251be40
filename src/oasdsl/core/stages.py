RENDER_STAGES = [
    ("load_config", "Load config"),
    ("load_document", "Load document"),
    ("encode", "Encode"),
    ("write_output", "Write output"),
]

CHECK_STAGES = [
    ("load_config", "Load config"),
    ("load_document", "Load document"),
    ("document_shape", "Document shape"),
    ("component_schemas", "Component schemas"),
    ("cross_format", "Cross-format check"),
]

