# services
# One module of stateless accessors per API entity. Each function takes the
# ApiClient first and issues exactly one HTTP call.
