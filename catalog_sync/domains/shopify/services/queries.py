"""
Bulk query documents.

Every node selects ``__typename`` so the flat export carries an explicit
record type next to ``__parentId``.
"""

PRODUCTS_BULK_QUERY = """
{
  products {
    edges {
      node {
        __typename
        id
        title
        handle
        status
        descriptionHtml
        tags
        options {
          name
          values
        }
        images {
          edges {
            node {
              __typename
              id
              url
              altText
            }
          }
        }
        variants {
          edges {
            node {
              __typename
              id
              title
              sku
              price
              inventoryQuantity
              selectedOptions {
                name
                value
              }
              metafields {
                edges {
                  node {
                    __typename
                    id
                    namespace
                    key
                    value
                    type
                  }
                }
              }
            }
          }
        }
        metafields {
          edges {
            node {
              __typename
              id
              namespace
              key
              value
              type
            }
          }
        }
        collections {
          edges {
            node {
              __typename
              id
              title
              handle
            }
          }
        }
      }
    }
  }
}
"""

COLLECTIONS_BULK_QUERY = """
{
  collections {
    edges {
      node {
        __typename
        id
        title
        handle
        description
        products {
          edges {
            node {
              __typename
              id
            }
          }
        }
      }
    }
  }
}
"""

CURRENT_BULK_OPERATION_QUERY = """
query {
  currentBulkOperation {
    id
    status
    errorCode
    url
    objectCount
  }
}
"""

BULK_OPERATION_RUN_MUTATION = """
mutation RunBulk($query: String!) {
  bulkOperationRunQuery(query: $query) {
    bulkOperation {
      id
      status
    }
    userErrors {
      field
      message
    }
  }
}
"""

BULK_OPERATION_CANCEL_MUTATION = """
mutation CancelBulk($id: ID!) {
  bulkOperationCancel(id: $id) {
    bulkOperation {
      id
      status
    }
    userErrors {
      field
      message
    }
  }
}
"""
