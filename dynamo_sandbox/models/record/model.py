class StoreRecord:
    "An item identified by its (partition key, sort key) pair, plus any other attributes"

    def __init__(self, partition_key, sort_key, attributes=None):
        assert partition_key, 'Partition key is required'
        assert sort_key, 'Sort key is required'
        self.partition_key = partition_key
        self.sort_key = sort_key
        self.attributes = dict(attributes or {})

    def __eq__(self, other):
        return isinstance(other, StoreRecord) and (
            (self.partition_key, self.sort_key, self.attributes)
            == (other.partition_key, other.sort_key, other.attributes)
        )

    def __repr__(self):
        return f'StoreRecord({self.partition_key!r}, {self.sort_key!r})'

    @property
    def composite_key(self):
        return (self.partition_key, self.sort_key)

    def key(self, partition_key_name='PK', sort_key_name='SK'):
        return {partition_key_name: self.partition_key, sort_key_name: self.sort_key}

    def item(self, partition_key_name='PK', sort_key_name='SK'):
        "Render as a dynamo item keyed by the given attribute names"
        shadowed = {partition_key_name, sort_key_name} & set(self.attributes)
        assert not shadowed, f'Attributes may not redefine key attributes {sorted(shadowed)}'
        return {**self.attributes, **self.key(partition_key_name, sort_key_name)}

    @classmethod
    def from_item(cls, item, partition_key_name='PK', sort_key_name='SK'):
        attributes = {k: v for k, v in item.items() if k not in (partition_key_name, sort_key_name)}
        return cls(item[partition_key_name], item[sort_key_name], attributes)
