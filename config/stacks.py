"""Stack definition for generated projects (Next.js App Router + Tailwind)."""

NEXTJS = {
    "name": "Next.js App Router + TypeScript + Tailwind",
    "required_files": [
        "app/layout.tsx",
        "app/page.tsx",
        "app/loading.tsx",
        "app/globals.css",
    ],
    "syntax_extensions": [".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs", ".json"],
    "lint_extensions": [".ts", ".tsx", ".js", ".jsx"],
    "core_packages": ["next", "react", "react-dom"],
    "default_dependencies": {
        "next": "^15.0.0",
        "react": "^19.0.0",
        "react-dom": "^19.0.0",
        "framer-motion": "^11.11.17",
        "lucide-react": "^0.468.0",
        "react-scroll-parallax": "^3.4.5",
        "@radix-ui/react-slot": "^1.0.2",
        "class-variance-authority": "^0.7.0",
        "clsx": "^2.0.0",
        "tailwind-merge": "^2.2.0",
    },
    "dev_dependencies": {
        "@types/node": "^20",
        "@types/react": "^19",
        "@types/react-dom": "^19",
        "typescript": "^5",
        "tailwindcss": "^3.4.1",
        "postcss": "^8",
        "autoprefixer": "^10",
    },
    "scripts": {
        "dev": "next dev",
        "build": "next build",
        "start": "next start",
        "lint": "next lint",
    },
}

# Versions used when an import references a package the manifest does not
# declare. Anything not listed falls back to "latest".
KNOWN_VERSIONS = {
    **NEXTJS["default_dependencies"],
    "@radix-ui/react-dialog": "^1.1.2",
    "@radix-ui/react-dropdown-menu": "^2.1.2",
    "@radix-ui/react-accordion": "^1.2.1",
    "@radix-ui/react-tabs": "^1.1.1",
    "@radix-ui/react-tooltip": "^1.1.3",
    "@radix-ui/react-popover": "^1.1.2",
    "@heroicons/react": "^2.1.5",
    "react-icons": "^5.3.0",
    "react-intersection-observer": "^9.13.1",
    "react-hook-form": "^7.53.0",
    "zod": "^3.23.8",
    "@hookform/resolvers": "^3.9.0",
    "date-fns": "^4.1.0",
    "recharts": "^2.13.0",
    "swiper": "^11.1.14",
    "embla-carousel-react": "^8.3.0",
    "sonner": "^1.5.0",
    "next-themes": "^0.3.0",
    "@supabase/supabase-js": "^2.45.4",
    "@supabase/ssr": "^0.5.1",
    "three": "^0.169.0",
    "@react-three/fiber": "^8.17.10",
    "@react-three/drei": "^9.114.3",
    "gsap": "^3.12.5",
    "axios": "^1.7.7",
    "zustand": "^5.0.0",
}

EXCLUDED_DIRS = {"node_modules", ".next", ".git", ".vercel", ".turbo"}

LOCKFILES = {"package-lock.json", "yarn.lock", "pnpm-lock.yaml", "bun.lockb", "npm-shrinkwrap.json"}

# Node built-ins never become dependencies.
NODE_BUILTINS = {
    "assert", "async_hooks", "buffer", "child_process", "cluster", "console",
    "constants", "crypto", "dgram", "diagnostics_channel", "dns", "domain",
    "events", "fs", "http", "http2", "https", "inspector", "module", "net",
    "os", "path", "perf_hooks", "process", "punycode", "querystring",
    "readline", "repl", "stream", "string_decoder", "sys", "timers", "tls",
    "trace_events", "tty", "url", "util", "v8", "vm", "wasi",
    "worker_threads", "zlib",
}
