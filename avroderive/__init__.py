import importlib

mod = "avroderive"
class LazyLoader:
    """
    Lazy loader for the avroderive functions to speed up startup time.
    """
    def __init__(self, mappings):
        self._modules = {}
        self._mappings = mappings

    def _load_module(self, module_name):
        if module_name not in self._modules:
            self._modules[module_name] = importlib.import_module(module_name)
        return self._modules[module_name]

    def __getattr__(self, item):
        if item in self._mappings:
            module_name, func_name = self._mappings[item]
            module = self._load_module(module_name)
            return getattr(module, func_name)
        else:
            return self._load_module(f"{mod}.{item}")

# Public entry points and the modules that define them
_mappings = {
    "AvroSchemaDeriver": (f"{mod}.derive_schema", "AvroSchemaDeriver"),
    "derive_schema_for_record": (f"{mod}.derive_schema", "derive_schema_for_record"),
    "derive_schema_for_messages": (f"{mod}.derive_schema", "derive_schema_for_messages"),
    "convert_record_to_avro": (f"{mod}.messagestoschema", "convert_record_to_avro"),
    "convert_messages_to_avro": (f"{mod}.messagestoschema", "convert_messages_to_avro"),
    "DerivationMode": (f"{mod}.type_nodes", "DerivationMode"),
    "DeriveSchemaError": (f"{mod}.errors", "DeriveSchemaError"),
    "InvalidNameError": (f"{mod}.errors", "InvalidNameError"),
    "RangeError": (f"{mod}.errors", "RangeError"),
    "TypeConflictError": (f"{mod}.errors", "TypeConflictError"),
    "InvalidStructureError": (f"{mod}.errors", "InvalidStructureError"),
    "NestingDepthError": (f"{mod}.errors", "NestingDepthError"),
    "NoSchemaDerivedError": (f"{mod}.errors", "NoSchemaDerivedError"),
}

_lazy_loader = LazyLoader(_mappings)

def __getattr__(name):
    return getattr(_lazy_loader, name)
