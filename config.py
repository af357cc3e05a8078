# Monitoring Service Configuration
# Copy this file to .env and adjust values as needed

# Prometheus Configuration
PROMETHEUS_URL=http://localhost:9090
PROMETHEUS_TIMEOUT=30

# Active monitoring backend (selects the namespace rewriter)
MONITORING_BACKEND=prometheus

# Kubernetes Configuration
KUBE_IN_CLUSTER=false
KUBECONFIG=~/.kube/config

# Server Configuration
HOST=0.0.0.0
PORT=8000
RELOAD=false

# CORS Configuration
CORS_ORIGINS=http://localhost:3000,http://localhost:8080,*

# GraphQL Configuration
GRAPHQL_PLAYGROUND_ENABLED=true

# Logging Configuration
LOG_LEVEL=info
